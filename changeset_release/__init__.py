"""Version and publish packages from changesets, in GitHub Actions."""
