"""Chromedriver binary provisioning."""
