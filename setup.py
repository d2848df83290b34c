#!/usr/bin/env python
"""
Setup script for the pysirs package.

Kept for tools that still invoke ``setup.py`` directly.
All metadata lives in pyproject.toml.
"""

from setuptools import setup

setup()
