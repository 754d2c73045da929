"""
French Fry Quality Inspection System

A rule-based image quality analysis engine for fried potato strips
using white-balanced HSV statistics, shadow-aware grid defect detection
and a fuzzy-logic Product Quality Index (PQI).
"""

__version__ = "0.1.0"
__author__ = "Fry Meter Team"
