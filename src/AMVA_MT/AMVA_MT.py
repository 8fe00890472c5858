import argparse
import numpy as np
import os
import sys

from collections import namedtuple

import MVA_Input
from MVA_Errors import MVAError, DegenerateNormalizerError, NonConvergenceError

FileName = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'InputData.dat')

# Результат расчёта: признак сходимости, суммарное время отклика, число итераций и итоговые матрицы R, Q, A
MVAResult = namedtuple('MVAResult', ['converged', 'R_total', 'iterations', 'R', 'Q', 'A'])

# Модифицированный MVA для замкнутой сети с N перекрывающимися задачами и C центрами
# (Mak & Lundstrom 1990, Liang & Tripathi 2000). Одна итерация:
#   1. reduceResidenceTime     - R[j] уменьшается на вклад задач i (на месте, j - внешний цикл, i - внутренний)
#   2. findQueueLength         - Q[j] = R[j] / sum(R[j])
#   3. findArrivalQueueLength  - A = TH . Q
#   4. findResponseTime        - R = D * (1 + A)
# Расчёт заканчивается, когда сумма R меняется меньше чем на ErrorRate, или после MaxIter итераций
class AMVA_MT(MVA_Input.MVA_Input):

    flagPrint = False   # Вывод промежуточных результатов

    def __init__(self, inputFileName = FileName, flagStart = True):
        super().__init__()
        if flagStart:
            self.main(inputFileName)

    # Уменьшение времени пребывания задачи j на вклад перекрывающихся задач i
    def reduceResidenceTime(self, R):
        TH = self.ParameterDict['TH']
        D  = self.ParameterDict['D']
        for j in range(self.N):
            for i in range(self.N):
                # R[i] уже может быть уменьшена на этом же проходе
                s = R[i].sum()
                if s == 0:
                    raise DegenerateNormalizerError(i, 'residence time reduction')
                R[j] -= TH[j][i] / self.N * D[j] * R[i] / s
        return R

    # Поиск Q: доля времени пребывания задачи в каждом центре
    def findQueueLength(self, R, Q):
        for j in range(self.N):
            s = R[j].sum()
            if s == 0:
                raise DegenerateNormalizerError(j, 'queue length')
            Q[j] = R[j] / s
        return Q

    # Поиск A: длина очереди в центре в момент поступления задачи
    def findArrivalQueueLength(self, Q, A):
        A[:] = np.dot(self.ParameterDict['TH'], Q)
        return A

    # Поиск R: время пребывания задачи в каждом центре
    def findResponseTime(self, A, R):
        R[:] = self.ParameterDict['D'] * (1 + A)
        return R

    # Выполнение одной итерации
    def doOneIter(self, R, Q, A):
        self.reduceResidenceTime(R)
        self.findQueueLength(R, Q)
        self.findArrivalQueueLength(Q, A)
        self.findResponseTime(A, R)
        return float(R.sum())

    # Выполнение всех итераций
    def forIter(self):
        R = np.array(self.ParameterDict['R'], dtype = float)
        Q = np.zeros((self.N, self.C))
        A = np.zeros((self.N, self.C))
        R_prev = float(R.sum())
        R_curr = R_prev
        iter = 0
        while iter < self.MaxIter:
            iter = iter + 1
            R_curr = self.doOneIter(R, Q, A)
            if self.flagPrint:
                print(f'   iter = {iter}:  R = {R_curr}')
            if not np.isfinite(R_curr):
                break
            if abs(R_prev - R_curr) < self.ErrorRate:
                return MVAResult(True, R_curr, iter, R, Q, A)
            R_prev = R_curr
        return MVAResult(False, R_curr, iter, R, Q, A)

    def solve(self):
        result = self.forIter()
        if not result.converged:
            raise NonConvergenceError(result.R_total, result.iterations)
        return result

    # Время отклика каждой задачи
    def findTaskResponseTime(self, R):
        return R.sum(axis = 1)

    # Время пребывания всех задач в каждом центре
    def findCenterResponseTime(self, R):
        return R.sum(axis = 0)

    # Отображение полученного результата
    def printResult(self, result):
        if self.flagPrint:
            print('\n   R =', result.R)
            print('\n   Q =', result.Q)
            print('\n   A =', result.A)
            print('\n   Rtask =', self.findTaskResponseTime(result.R))
            print('\n   Rcenter =', self.findCenterResponseTime(result.R))
            print('\n   iter =', result.iterations, '\n')
        print(f'R: {result.R_total:f}')
        return

    # Главная функция
    def main(self, inputFileName, tableArgs = None, maxIter = None):
        try:
            if tableArgs is None:
                self.splitInputFile(inputFileName)
            else:
                self.loadTableFiles(*tableArgs)
            if maxIter is not None:
                self.MaxIter = maxIter
                self.checkParameters()
            result = self.solve()
        except FileNotFoundError as e:
            print(f'\n   ERROR! Requested file "{e.filename}" not found!\n')
            return 1
        except OSError as e:
            print(f'\n   ERROR! Cannot read file "{e.filename}": {e.strerror}\n')
            return 1
        except NonConvergenceError as e:
            print(f'\n   ERROR! {e}\n')
            return 2
        except MVAError as e:
            print(f'\n   ERROR! {e}\n')
            return 1
        self.printResult(result)
        return 0


def run(argv = None):
    parser = argparse.ArgumentParser(description = 'Approximate MVA for closed queueing networks with overlapping tasks')
    parser.add_argument('-N', type = int, help = 'number of tasks')
    parser.add_argument('-C', type = int, help = 'number of service centers')
    parser.add_argument('-e', type = float, help = 'error tolerance')
    parser.add_argument('-r', help = 'file containing response times for each task')
    parser.add_argument('-s', help = 'file containing service demands for each task')
    parser.add_argument('-o', help = 'file containing the task overlap matrix')
    parser.add_argument('-i', help = 'network description in InputData.dat format (default: the sample file)')
    parser.add_argument('--max-iter', type = int, dest = 'maxIter', help = 'maximum number of iterations')
    parser.add_argument('-v', '--verbose', action = 'store_true', help = 'print every iteration and the final matrices')
    args = parser.parse_args(argv)
    tableArgs = [args.N, args.C, args.e, args.r, args.s, args.o]
    inputFileName = args.i
    if all(arg is None for arg in tableArgs):
        tableArgs = None
        if inputFileName is None:
            inputFileName = FileName
    elif any(arg is None for arg in tableArgs):
        parser.error('-N, -C, -e, -r, -s and -o must be given together')
    elif inputFileName is not None:
        parser.error('-i cannot be combined with -N, -C, -e, -r, -s and -o')
    model = AMVA_MT(flagStart = False)
    model.flagPrint = args.verbose
    return model.main(inputFileName, tableArgs, args.maxIter)

if __name__ == '__main__':
    sys.exit(run())
