"""Pulumi entry point for the openclaw-vps stack."""

from openclaw_vps.program import main

main()
