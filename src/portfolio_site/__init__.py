# Portfolio Site: academic portfolio content and the code behind its posts
#
# Static markdown pages (landing page, CV, research posts) live under site/
# and are rendered by an external Jekyll-style generator. This package holds
# the Python that travels with them.
#
# Subpackages:
#   content: front-matter parsing, permalinks and internal link checks
#   qaoa:    MaxCut QAOA walkthrough (QuTiP state evolution + SciPy optimizer)

__version__ = "0.1.0"
