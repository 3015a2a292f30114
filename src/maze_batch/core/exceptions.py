"""项目内使用的自定义异常定义。"""


class MazeBatchError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(MazeBatchError):
    """配置不合法时抛出。"""


class InvalidSeedInput(MazeBatchError):
    """种子输入格式错误或超出范围。"""


class NoArtifactKindSelected(MazeBatchError):
    """未选择任何输出类型。"""


class SeedCountOutOfBounds(MazeBatchError):
    """解析后的种子数量为 0 或超过上限。"""


class MissingEndpoints(MazeBatchError):
    """迷宫中缺少起点或终点标记。"""


class EngineFailure(MazeBatchError):
    """外部迷宫引擎在构建、寻路或渲染时出错。"""


class PackagingFailure(MazeBatchError):
    """打包或写出文件失败，已生成的结果仍然保留。"""
