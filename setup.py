from setuptools import setup

setup(
    name='posixacl',
    version='0.1.0',
    description='POSIX1E ACL xattr codec and editor for Linux',
    python_requires='>=3.10',
    packages=['posixacl', '_posixacl_scripts'],
    package_dir={
        'posixacl': 'posixacl',
        '_posixacl_scripts': 'scripts',
    },
    install_requires=[
        'python-dotenv',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'posixacl_getfacl=_posixacl_scripts._getfacl:main',
            'posixacl_setfacl=_posixacl_scripts._setfacl:main',
            'posixacl_socket=_posixacl_scripts._socket:main',
        ],
    },
)
