"""
Services module for business logic separation.

Service classes encapsulate link creation, redirect resolution, click
analytics and the external checks (reachability, Safe Browsing, QR codes),
keeping them separate from the API endpoints and database models.
"""
