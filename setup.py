from setuptools import setup, find_namespace_packages


setup(
    name='curve_sale',
    version='0.1',
    packages=find_namespace_packages(where="src"),
    package_dir={"": "src"},
    python_requires='>=3.9',
    install_requires=[
        'flask',
        'flask-openapi3',
        'pydantic>=2',
    ],
    extras_require={
        'test': [
            'pytest',
            'hypothesis',
        ],
    },
    entry_points={
        'console_scripts': [
            'curve_sale = curve_sale.webapi.webapi:main',
        ],
    },
)
