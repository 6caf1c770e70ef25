from setuptools import setup, find_packages

setup(
    name="apkbuild",
    version="0.0.1",
    description="A compiler from declarative package specs to apk build plans",
    author="Arsen Arsenovic",
    author_email="arsen@aarsen.me",
    packages=find_packages(include=["apkbuild", "apkbuild.*"]),
    license="AGPL-3.0-only",
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.5",
        "PyYAML",
        "toml",
        "msgpack",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    include_package_data=True,
    package_data={
        "apkbuild": ["pipelines/*.yaml", "pipelines/*/*.yaml"],
    },
    entry_points={
        "console_scripts": [
            "apkbuild-compile = apkbuild.cli:main",
        ]
    }
)
