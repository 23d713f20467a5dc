"""Around API: geo-tagged posts with image uploads and proximity search."""

from dotenv import load_dotenv

# Populate os.environ from .env before settings are first read.
# (pipenv also loads .env, so in some cases this is redundant)
load_dotenv()
