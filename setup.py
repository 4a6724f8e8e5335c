#!/usr/bin/env python
"""
Setup configuration for django-reusable-moderation package.
"""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="django-reusable-moderation",
    version="1.0.0",
    author="Ifeanyi Stanley Nnamani",
    author_email="nnamaniifeanyi10@gmail.com",
    description="A reusable Django moderation app: moderator queue, decisions with an immutable audit trail, and report resolution over a REST API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/NzeStan/django-reusable-moderation",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Web Environment",
        "Framework :: Django",
        "Framework :: Django :: 3.2",
        "Framework :: Django :: 4.0",
        "Framework :: Django :: 4.1",
        "Framework :: Django :: 4.2",
        "Framework :: Django :: 5.0",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    keywords=["django", "moderation", "rest-framework", "api", "reports", "audit"],
    packages=find_packages(exclude=["tests", "tests.*", "docs", "docs.*"]),
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "Django>=3.2",
        "djangorestframework>=3.14.0",
        "django-filter>=23.0",
        "bleach>=6.0.0",
    ],
    extras_require={
        'postgres': [
            'psycopg2-binary>=2.9.0',
        ],
        'dev': [
            # Testing
            'pytest>=7.4.0',
            'pytest-django>=4.7.0',
            'pytest-cov>=4.1.0',
            'factory-boy>=3.3.0',
            'Faker>=20.0.0',
            'freezegun>=1.4.0',
            # Code Quality
            'black>=23.0.0',
            'isort>=5.13.0',
            'ruff>=0.1.0',
        ],
    },
    zip_safe=False,
)
