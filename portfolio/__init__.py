"""Project portfolio service: lifecycle, allocation and risk rules."""
