"""MedLearn medical education API."""
