from setuptools import setup, find_packages

setup(
    name="verilist",
    version="0.1.0",
    description="verilist — singly-linked stack with runtime contracts and Z3 proofs",
    packages=find_packages(include=["verilist", "verilist.*"]),
    python_requires=">=3.10",
    install_requires=[
        "z3-solver>=4.12.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hypothesis>=6.0",
        ],
    },
)
