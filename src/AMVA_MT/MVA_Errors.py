# Ошибки, возникающие при загрузке данных и расчёте сети методом AMVA

class MVAError(Exception):
    pass


# Некорректные N, C, E, I или размеры матриц
class ConfigurationError(MVAError):
    pass


# Во входных данных не хватает значений или они не являются числами
class MalformedInputError(MVAError):
    pass


class DegenerateNormalizerError(MVAError):

    def __init__(self, task, step):
        self.task = task
        self.step = step
        super().__init__(f'Total residence time of task {task} is zero ({step})')


class NonConvergenceError(MVAError):

    def __init__(self, R_total, iterations):
        self.R_total = R_total
        self.iterations = iterations
        super().__init__(f'No convergence after {iterations} iterations (last R = {R_total})')
