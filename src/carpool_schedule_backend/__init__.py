'''
Carpool schedule backend: slot timing, schedule-template, conflict and
capacity validation for recurring group trips.
'''
