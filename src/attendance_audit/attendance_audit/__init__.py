"""Attendance Audit package.

Punch reconciliation and report aggregation, organized by feature modules
(punches, sessions, reports, cache, organization) with a thin Flask controller
layer over service/repository layers.
"""
