"""
VoterPortal - Voter Roll Data Entry Assistant

A browser application for field operators to look up household members by
booth and house number or by name, fill in Aadhaar numbers and birth dates,
and write the changes back to a spreadsheet-backed voter roll.
"""

__version__ = "0.1.0"
__author__ = "VoterPortal Contributors"
