"""Parsing and argument checks for interactive commands."""