"""桌面 GUI（tkinter）。"""
