"""SplusEins timetable backend."""
