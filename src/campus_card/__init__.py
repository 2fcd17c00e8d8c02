"""Campus Card package.

NFC campus access-card backend organised by feature modules (users, identity,
approvals, cards) with a thin Flask controller layer over service/repository
layers.
"""

__version__ = "1.0.0"
