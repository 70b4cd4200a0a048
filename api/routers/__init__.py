"""
API Routers - Organized endpoint handlers for the occupancy API.

Each router handles a specific domain:
- diagnostics: Bed/technician consistency checks and repairs
- reports: Occupancy reports and CSV export
"""
