"""nixdoc: generate DocBook reference sections from documented Nix functions."""

__version__ = "0.1.0"
