"""
apklink: Acquire Android packages and link them into builds as JAR archives.

Packages are resolved from a local file, a versioned remote catalog, or a direct
URL, normalized out of XAPK bundles when needed, converted with dex2jar, and
cached next to the output with sidecar state so repeated runs stay idempotent.
"""

__version__ = "1.0.0"
__author__ = "apklink Team"
