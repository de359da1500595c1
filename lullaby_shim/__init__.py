"""lupinas-lullaby — fetches and runs the prebuilt lupinas-lullaby binary."""

__package_name__ = "lupinas-lullaby"
__version__ = "0.1.0"
