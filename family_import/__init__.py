#Turn this directory into a package by adding an __init__.py file
#Docstring for the package
"""
Family Import Reconciliation

This package contains the modules for:

- Loading the benefit registry and school enrollment CSV extracts
- Cleaning and normalizing names, NIS numbers and dates
- Cross-referencing dependents against the enrollment registry
- Settling dependents claimed by more than one guardian
- Saving granted families and writing the rejection audit file

Subpackages:
- core
- cleaning
- engines
- visualization
- outputs

"""

#Import modules to be exposed at the package level
from . import core, cleaning, engines, visualization, outputs
__all__ = [
    "core",
    "cleaning",
    "engines",
    "visualization",
    "outputs",
]
