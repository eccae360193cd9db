"""Staff and applicant-session authentication"""
