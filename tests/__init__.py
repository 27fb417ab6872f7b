# Tests for Portfolio Site
#
# Test organization mirrors source structure:
#   - test_front_matter.py, test_documents.py, test_links.py,
#     test_validation.py: content checks on temporary site trees
#   - test_site_content.py: the bundled site/ must pass its own checks
#   - test_qaoa_*.py: MaxCut problems, ansatz state and angle optimization
#
# Running tests:
#   pytest tests/
#   pytest tests/ -k "qaoa"
