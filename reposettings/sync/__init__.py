"""Settings sync — reconcile repository attributes against declared settings.

Each plugin in this package:
- Fetches the current state of the repository
- Compares it with the desired value from the settings document
- Applies the difference, or returns a preview of it in nop mode
"""
