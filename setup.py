import setuptools

setuptools.setup(
    name="gcpkms",
    version="0.1.0",
    author="The gcpkms authors",
    description=("Google Cloud KMS asymmetric keys as signers and "
                 "decrypters"),
    license="Apache Software License",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    python_requires='>=3.7',
    install_requires=[
        'cryptography>=37.0',
        'click',
        'google-cloud-kms>=2.0.0',
    ],
    extras_require={
        'tests': [
            'pytest',
            'google-api-core',
        ],
    },
    entry_points={
        "console_scripts": ["gcpkms=gcpkms.main:gcpkms"]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Development Status :: 4 - Beta",
        "Topic :: Security :: Cryptography",
        "License :: OSI Approved :: Apache Software License",
    ],
)
