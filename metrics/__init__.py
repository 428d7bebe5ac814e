"""Conversion of metric snapshots into metric forwarder data points and their periodic export"""
