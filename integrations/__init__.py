"""
Remote API clients for Marianatek and Webflow.
"""
