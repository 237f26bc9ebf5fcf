"""Install workflow steps: select, fetch, verify, extract, install, check."""
