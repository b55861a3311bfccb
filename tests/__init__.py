"""Unit tests for the LLM translator.

This package contains test modules for all components of the translator.
Tests use pytest with asyncio support and mock HTTP calls by patching AsyncHttp.
"""
