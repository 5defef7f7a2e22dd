"""Command line front end for phrasecore."""
