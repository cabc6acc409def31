from setuptools import find_packages, setup

setup(
    name='nbpbridge',
    version='1.0.0',
    description='ZeroMQ <-> serial gateway daemon for the Nest thermostat backplate',
    author='isantolin',
    author_email='',
    packages=find_packages(include=['nbpbridge', 'nbpbridge.*']),
    python_requires='>=3.11',
    install_requires=[
        'pyserial',
        'pyzmq>=22',
        'msgspec>=0.18',
        'construct>=2.10',
        'transitions>=0.9',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'nbpbridge=nbpbridge.daemon:main',
        ],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: POSIX :: Linux',
    ],
)
