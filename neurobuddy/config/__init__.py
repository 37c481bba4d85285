"""配置加载：见 settings 模块。"""
