from setuptools import setup, find_packages

setup(
    name='zmongo_orgs',
    version='0.1.0',
    packages=find_packages(include=['zmongo_orgs', 'zmongo_orgs.*']),
    install_requires=[
        'python-dotenv',
        'pymongo',
        'motor',
        'pydantic>=2',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
        ],
    },
    python_requires='>=3.9',
    include_package_data=True,
    description='Async MongoDB CRUD and reference-population services for organizations, users and projects.',
    author='CentralFloridaAttorney',
)
