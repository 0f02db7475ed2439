"""HTTP surface of the orchestration service"""
