"""
Test suites package.

This repository intentionally keeps `testsuites` importable to support:
  - IDE navigation
  - shared page doubles (`testsuites.fakes`) imported by every suite

All content is demo-safe and does not include production secrets.
"""
