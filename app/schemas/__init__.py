"""
Schemas module - Request/Response schemas and internal records.

- Records: Application, Resume, CoverLetter (rows as read from the store)
- Views: EnrichedApplication, ApplicationListing (what clients receive)
- Requests: ApplicationCreate, ApplicationUpdate, auth payloads
"""
