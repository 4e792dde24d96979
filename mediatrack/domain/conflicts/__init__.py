"""Reservation conflict detection, alert dedup and unsubscribe tokens"""
