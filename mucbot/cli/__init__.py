"""mucbot的命令行接口。"""
