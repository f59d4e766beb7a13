"""WP Dependency Installer.

Lets a plugin or theme declare the plugins it depends on in a
``wp-dependencies.json`` manifest and have them downloaded, installed and
activated by the hosting site.
"""

__version__ = "1.4.4"
