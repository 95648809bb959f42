#!/usr/bin/env python3
import os
import re
import sys
from typing import Tuple

PYPROJECT = 'pyproject.toml'
PACKAGE_INIT = os.path.join('awsig', '__init__.py')

_PYPROJECT_VERSION_RE = re.compile(r'^version = "([^"]+)"', re.MULTILINE)
_INIT_VERSION_RE = re.compile(r'__version__ = "[^"]+"')


def bump_version(current: str, bump_type: str) -> str:
    major, minor, patch = map(int, current.split('.'))
    if bump_type == 'major':
        return f"{major + 1}.0.0"
    elif bump_type == 'minor':
        return f"{major}.{minor + 1}.0"
    elif bump_type == 'patch':
        return f"{major}.{minor}.{patch + 1}"
    else:
        raise ValueError(f"Invalid bump type: {bump_type}")


def bump_project(root: str, bump_type: str) -> Tuple[str, str]:
    """Rewrite the version in pyproject.toml and awsig/__init__.py under ``root``.

    Returns the old and new version strings.
    """
    pyproject_path = os.path.join(root, PYPROJECT)
    init_path = os.path.join(root, PACKAGE_INIT)

    with open(pyproject_path, 'r') as f:
        content = f.read()
    match = _PYPROJECT_VERSION_RE.search(content)
    if not match:
        raise ValueError(f"Could not find version in {pyproject_path}")
    current_version = match.group(1)
    new_version = bump_version(current_version, bump_type)

    with open(pyproject_path, 'w') as f:
        f.write(_PYPROJECT_VERSION_RE.sub(f'version = "{new_version}"', content, count=1))

    with open(init_path, 'r') as f:
        init_content = f.read()
    with open(init_path, 'w') as f:
        f.write(_INIT_VERSION_RE.sub(f'__version__ = "{new_version}"', init_content))

    return current_version, new_version


def main():
    if len(sys.argv) != 2:
        print("Usage: bump_version.py <major|minor|patch>", file=sys.stderr)
        sys.exit(1)

    try:
        current_version, new_version = bump_project(os.getcwd(), sys.argv[1])
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    # Output for GitHub Actions
    github_output = os.environ.get('GITHUB_OUTPUT')
    if github_output:
        with open(github_output, 'a') as f:
            f.write(f"current_version={current_version}\n")
            f.write(f"new_version={new_version}\n")
    else:
        # Local usage: print to stdout
        print(f"Bumped version: {current_version} -> {new_version}")


if __name__ == '__main__':
    main()
