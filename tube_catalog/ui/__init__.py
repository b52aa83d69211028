"""Terminal front-ends for browsing the catalog."""
