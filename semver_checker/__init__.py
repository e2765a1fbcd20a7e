"""Semantic version checker for GitHub Actions repositories.

Audits the version refs of an action repository against the usual
GitHub Actions conventions and optionally repairs them:
- Patch versions (vX.Y.Z) are tags backed by exactly one published release
- Floating versions (vX, vX.Y) track the highest patch in their series
- A "latest" alias tracks the highest patch overall
- Published releases are immutable
"""

__version__ = "1.0.0"
