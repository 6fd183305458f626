"""Junos device access: constants, NETCONF sessions and the session client"""
