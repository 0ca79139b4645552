"""HTTP routers for the focus API."""
