"""School Attendance package.

This package is organized by feature modules (users, attendance, notifications,
activity) with a thin Flask controller layer and service/repository layers.
"""
