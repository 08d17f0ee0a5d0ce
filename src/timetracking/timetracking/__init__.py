"""Construction time-tracking package.

Workers check in to a job site (optionally validated against the site's
geofence) and check out, at which point billable duration and cost are
computed once and persisted. Organized by feature modules (attendance, jobs,
sites, users, reports, ...) behind a thin Flask controller layer.
"""
