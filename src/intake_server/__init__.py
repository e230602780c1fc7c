"""intake_server — FastAPI REST API for the H-2B intake wizard.

Hosts one wizard per client (identified by ``X-User-ID``), keeping the
draft in PostgreSQL and storing submitted cases for attorney review.
"""
