"""基础设施层：日志等横切能力。"""
