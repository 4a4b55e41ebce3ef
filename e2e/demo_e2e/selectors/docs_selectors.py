# e2e/demo_e2e/selectors/docs_selectors.py

DOCS_URL = "https://playwright.dev/"
TITLE_PATTERN = "Playwright"

GET_STARTED_LINK_ROLE = "link"
GET_STARTED_LINK_NAME = "Get started"

INSTALLATION_HEADING_ROLE = "heading"
INSTALLATION_HEADING_NAME = "Installation"
