from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="school-fee-ledger",
    version="1.0.0",
    description="School fee management dashboard with master ledger and CSV export",
    long_description=long_description,
    long_description_content_type="text/markdown",
    py_modules=[
        'app',
        'auth',
        'build',
        'config',
        'dashboard',
        'extensions',
        'forms',
        'health',
        'ledger',
        'models',
        'records',
        'repository',
        'security',
    ],
    include_package_data=True,
    install_requires=[
        'Flask>=2.3.3',
        'Flask-SQLAlchemy>=3.0.5',
        'Flask-WTF>=1.2.1',
        'python-dotenv>=1.0.0',
        'SQLAlchemy>=2.0.20',
        'WTForms>=3.0.1',
        'Werkzeug>=2.3.7',
        'gunicorn>=21.2.0',
        'psycopg2-binary>=2.9.9',
        'bcrypt>=4.0.1',
        'python-jose>=3.3.0',
    ],
    extras_require={
        'tests': [
            'pytest>=7.4',
        ],
    },
    python_requires='>=3.9',
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    entry_points={
        'console_scripts': [
            'school-fee-ledger-init=build:main',
        ],
    },
)
