"""Staff check-in package.

Organized by feature modules (users, campuses, attendance, verification, ...)
with a thin Flask controller layer over service/repository layers.
"""
