"""MCP tool registrations for the 4o-image MCP Server"""
