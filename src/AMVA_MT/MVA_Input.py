import numpy as np

from re import sub
from MVA_Errors import ConfigurationError, MalformedInputError

# Чтение матрицы rows x cols из потока (значения через пробел, построчно)
def readTable(inputFile, rows, cols, name):
    paramArray = inputFile.read().split()
    if len(paramArray) < rows * cols:
        raise MalformedInputError(f'Table "{name}" needs {rows * cols} values, found {len(paramArray)}')
    return toMatrix(paramArray[:(rows * cols)], rows, cols, name)

def readTableFile(inputFileName, rows, cols, name):
    try:
        with open(inputFileName, 'r', encoding = 'utf-8') as inputFile:
            return readTable(inputFile, rows, cols, name)
    except UnicodeDecodeError:
        raise MalformedInputError(f'File "{inputFileName}" is not a UTF-8 text file') from None

def toMatrix(paramArray, rows, cols, name):
    try:
        values = list(map(float, paramArray))
    except ValueError:
        raise MalformedInputError(f'Table "{name}" contains a non-numeric value') from None
    matrix = np.array(values).reshape(rows, cols)
    checkFinite(matrix, name)
    return matrix

# nan и inf не допускаются ни в одной из матриц
def checkFinite(matrix, name):
    if not np.isfinite(matrix).all():
        raise MalformedInputError(f'Table "{name}" contains a non-finite value')
    return


class MVA_Input():

    N = 1             # Количество задач (классов заявок) в сети
    C = 1             # Количество центров обслуживания
    ErrorRate = 0.1   # Погрешность выполнения программы
    MaxIter = 1000    # Максимальное количество итераций

    TableNames = ['R', 'D', 'TH']

    def __init__(self):
        self.ParameterDict = { 'R' : np.empty(0),    # Начальные времена пребывания задач в центрах (размер - N x C)
                               'D' : np.empty(0),    # Требования к обслуживанию задач в центрах (размер - N x C)
                               'TH': np.empty(0) }   # Матрица перекрытия задач (размер - N x N)

    # Размер матрицы параметра
    def tableShape(self, paramName):
        if paramName == 'TH':
            return (self.N, self.N)
        return (self.N, self.C)

    # Проверка скалярных параметров сети
    def checkParameters(self):
        for paramName, value in [('N', self.N), ('C', self.C), ('I', self.MaxIter)]:
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
                raise ConfigurationError(f'Parameter "{paramName}" must be a positive integer, got {value!r}')
        try:
            errorRate = float(self.ErrorRate)
        except (TypeError, ValueError):
            raise ConfigurationError(f'Parameter "E" must be a number, got {self.ErrorRate!r}') from None
        if not np.isfinite(errorRate) or errorRate <= 0:
            raise ConfigurationError(f'Parameter "E" must be positive, got {self.ErrorRate!r}')
        self.ErrorRate = errorRate
        return

    # Проверка размеров матриц
    def checkMatrices(self):
        for paramName in self.TableNames:
            shape = np.shape(self.ParameterDict[paramName])
            if shape != self.tableShape(paramName):
                raise ConfigurationError(f'Matrix "{paramName}" has shape {shape}, expected {self.tableShape(paramName)}')
        return

    # Задание параметров сети напрямую
    def setParameters(self, N, C, ErrorRate, R, D, TH, MaxIter = None):
        self.N = N
        self.C = C
        self.ErrorRate = ErrorRate
        if MaxIter is not None:
            self.MaxIter = MaxIter
        self.checkParameters()
        try:
            for paramName, value in [('R', R), ('D', D), ('TH', TH)]:
                self.ParameterDict[paramName] = np.array(value, dtype = float)
        except (TypeError, ValueError):
            raise MalformedInputError(f'Matrix "{paramName}" contains a non-numeric value') from None
        self.checkMatrices()
        for paramName in self.TableNames:
            checkFinite(self.ParameterDict[paramName], paramName)
        return

    # Получение параметров сети из трёх файлов (время отклика, требования, перекрытие)
    def loadTableFiles(self, N, C, ErrorRate, responseFileName, demandFileName, overlapFileName, MaxIter = None):
        self.N = N
        self.C = C
        self.ErrorRate = ErrorRate
        if MaxIter is not None:
            self.MaxIter = MaxIter
        self.checkParameters()
        for paramName, fileName in [('R', responseFileName), ('D', demandFileName), ('TH', overlapFileName)]:
            rows, cols = self.tableShape(paramName)
            self.ParameterDict[paramName] = readTableFile(fileName, rows, cols, paramName)
        return

    # Получение из входного файла значений параметров сети
    def getInputParameter(self, inputFile):
        tableArray = {}
        flagName = None
        for line in inputFile:
            line = line.split('#')[0]
            lineParamIndex = line.find('=')
            if lineParamIndex > -1:
                paramName  = line[:lineParamIndex].strip()
                paramArray = sub(r'\s+', ' ', line[(lineParamIndex + 1):].strip()).split()
                flagName = None
                if paramName in self.TableNames:
                    flagName = paramName
                    tableArray[paramName] = paramArray
                    continue
                if len(paramArray) == 0:
                    raise MalformedInputError(f'Parameter "{paramName}" has no value')
                try:
                    if   paramName == 'N':
                        self.N = int(paramArray[0])
                    elif paramName == 'C':
                        self.C = int(paramArray[0])
                    elif paramName == 'E':
                        self.ErrorRate = float(paramArray[0])
                    elif paramName == 'I':
                        self.MaxIter = int(paramArray[0])
                except ValueError:
                    raise MalformedInputError(f'Incorrect value of parameter "{paramName}": {paramArray[0]}') from None
            elif flagName is not None:
                tableArray[flagName] += line.split()
        self.checkParameters()
        for paramName in self.TableNames:
            if not paramName in tableArray:
                raise MalformedInputError(f'Parameter "{paramName}" not found')
            rows, cols = self.tableShape(paramName)
            if len(tableArray[paramName]) != rows * cols:
                raise MalformedInputError(f'Table "{paramName}" needs {rows * cols} values, found {len(tableArray[paramName])}')
            self.ParameterDict[paramName] = toMatrix(tableArray[paramName], rows, cols, paramName)
        return

    # Открытие файла с заданными параметрами сети
    def splitInputFile(self, inputFileName):
        try:
            with open(inputFileName, 'r', encoding = 'utf-8') as inputFile:
                self.getInputParameter(inputFile)
        except UnicodeDecodeError:
            raise MalformedInputError(f'File "{inputFileName}" is not a UTF-8 text file') from None
        return
