import os
from setuptools import setup, find_packages

with open("README.md") as readme_file:
    readme = readme_file.read()

this = os.path.dirname(os.path.realpath(__file__))


def read(name):
    with open(os.path.join(this, name)) as f:
        return f.read()

VERSION = "1.0.0"


setup(
    name="tuned-switcher",
    version=VERSION,
    description="View and switch tuned performance profiles from the panel or the command line",
    long_description=readme,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=read("requirements.txt"),
    extras_require={"test": ["pytest"]},
    python_requires=">=3.8",
    include_package_data=True,
    zip_safe=True,
    license="GPLv3",
    keywords="linux tuned power profile switcher tray dbus",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Operating System :: POSIX :: Linux",
        "Environment :: Console",
        "Natural Language :: English",
    ],
    entry_points={
        "console_scripts": [
            "tuned-switcher=tuned_switcher.bin.tuned_switcher:main",
        ],
        "gui_scripts": [
            "tuned-switcher-tray=tuned_switcher.bin.tuned_switcher_tray:main",
        ],
    },
)
