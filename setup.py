from setuptools import setup, find_packages

setup(
    name             = 'mor-exporter',
    version          = '1.0.0',
    description      = 'Kolmisoft MOR call-detail CSV exporter over an SSH tunnel',
    packages         = find_packages(exclude=['tests*']),
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': ['pytest>=7', 'cryptography>=3.0'],
    },
    entry_points     = {
        'console_scripts': [
            'mor-exporter = morexport.cli:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
