"""Engine services: eligibility rules and approval scoring."""
