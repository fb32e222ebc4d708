"""Setup script for the CalendarHub ICS feed aggregator."""

import os
from pathlib import Path

from setuptools import find_packages, setup
from setuptools.command.develop import develop
from setuptools.command.install import install


def post_install_setup():
    """Create the configuration and data directories and show setup guidance."""
    try:
        config_dir = Path.home() / ".config" / "calendarhub"
        data_dir = Path.home() / ".local" / "share" / "calendarhub"

        for directory in [config_dir, data_dir]:
            directory.mkdir(parents=True, exist_ok=True)
            if hasattr(os, "chmod"):
                os.chmod(directory, 0o755)

        config_file = config_dir / "config.yaml"
        if not config_file.exists():
            print("\n" + "=" * 60)
            print("CalendarHub Installation Complete!")
            print("=" * 60)
            print(f"Configuration directory: {config_dir}")
            print(f"Data directory: {data_dir}")
            print("\nNext Steps:")
            print("1. Copy config/config.yaml.example to the configuration directory as config.yaml")
            print("2. List your ICS feeds under 'sources'")
            print("3. Run 'calendarhub refresh'")
            print("=" * 60)

    except OSError as e:
        print(f"Warning: Post-install setup failed: {e}")
        print("You may need to create configuration directories manually.")


class PostInstallCommand(install):
    """Custom install command with post-install setup."""

    def run(self):
        install.run(self)
        post_install_setup()


class PostDevelopCommand(develop):
    """Custom develop command with post-install setup."""

    def run(self):
        develop.run(self)
        post_install_setup()


# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read requirements, separating test dependencies
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
dev_requirements = []

if requirements_file.exists():
    content = requirements_file.read_text().strip()
    lines = content.split("\n")

    for line in lines:
        line = line.strip()
        # Skip empty lines and comments
        if not line or line.startswith("#"):
            continue

        # Separate development dependencies
        if "pytest" in line:
            dev_requirements.append(line)
        else:
            requirements.append(line)

setup(
    name="calendarhub",
    version="1.0.0",
    description="Aggregate published ICS calendar feeds into one categorized, colored event list",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="CalendarHub Team",
    # Package configuration
    packages=find_packages(exclude=["tests*", "docs*"]),
    include_package_data=True,
    # Dependencies
    install_requires=requirements,
    extras_require={
        "dev": dev_requirements,
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business :: Scheduling",
        "Framework :: AsyncIO",
    ],
    keywords="calendar ics icalendar outlook icloud rrule aggregation async",
    entry_points={
        "console_scripts": [
            "calendarhub=calendarhub.__main__:main",
        ],
    },
    cmdclass={
        "install": PostInstallCommand,
        "develop": PostDevelopCommand,
    },
    zip_safe=False,
    platforms=["linux", "macos"],
)
