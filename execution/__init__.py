"""Action plans, execution reports and their orchestration"""
