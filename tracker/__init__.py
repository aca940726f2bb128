"""Productivity Tracker - projects, tasks, stopwatch and Pomodoro timing"""
